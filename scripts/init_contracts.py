# %% Imports
import logging
import sys
from asyncio import run

from dotenv import load_dotenv

from starknet_deployments import (
    AddressOf,
    DeploymentError,
    InvokeRequest,
    Pipeline,
    RuntimeContext,
    load_config,
)

logging.basicConfig()
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)
logging.getLogger("starknet_deployments").setLevel(logging.INFO)

# Addresses come from the manifest written by scripts/deploy.py
INIT = Pipeline(
    "init",
    [
        # QuestFactory becomes a trusted handler of Gem
        InvokeRequest("Gem", "add_trusted_handler", [AddressOf("QuestFactory")]),
        # Gem becomes an approved minter of Loomi
        InvokeRequest("Loomi", "approve_minter", [AddressOf("Gem")]),
    ],
)


# %% Main
def main():
    load_dotenv()
    # Connects and checks the chain id before the event loop starts
    ctx = RuntimeContext.from_config(load_config())
    run(INIT.run(ctx))
    logger.info("✅ Initialization completed successfully!")


# %% Run
if __name__ == "__main__":
    try:
        main()
    except DeploymentError as e:
        logger.error("❌ %s: %s", type(e).__name__, e)
        sys.exit(1)
