from prefect import serve

from playoff_pool.pool_standings_pipeline import (
    pool_standings_data_flow
)

if __name__ == "__main__":
    """
    Run the Pool Standings flow.
    """
    # Set up the Pool Standings Data Pipeline, refreshed every 5 minutes
    pool_standings_deployment = pool_standings_data_flow.to_deployment(
        "pool-standings-data-pipeline",
        interval=300,
    )

    # Serve the flows
    serve(pool_standings_deployment)  # type: ignore
