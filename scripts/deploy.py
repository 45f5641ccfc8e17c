# %% Imports
import logging
import sys
from asyncio import run

from dotenv import load_dotenv

from starknet_deployments import (
    DEPLOYER,
    AddressOf,
    ClassHashOf,
    DeclareRequest,
    DeploymentError,
    DeploymentRequest,
    Pipeline,
    RuntimeContext,
    load_config,
)

logging.basicConfig()
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)
logging.getLogger("starknet_deployments").setLevel(logging.INFO)

BACKEND_URL = "https://bb-backend-stg.onrender.com"

DEPLOY = Pipeline(
    "deploy",
    [
        DeploymentRequest(
            "Loomi",
            {"owner": DEPLOYER, "base_uri": f"{BACKEND_URL}/reward/loomi/"},
        ),
        DeploymentRequest(
            "Gem",
            {
                "owner": DEPLOYER,
                "loomi_address": AddressOf("Loomi"),
                "base_uri": f"{BACKEND_URL}/reward/gem/",
            },
        ),
        DeploymentRequest("SBT", {"owner": DEPLOYER, "base_uri": f"{BACKEND_URL}/sbt/"}),
        DeploymentRequest("BBAvatar", {"owner": DEPLOYER, "base_uri": f"{BACKEND_URL}/avatar/"}),
        DeploymentRequest("WardrobeKey", {"owner": DEPLOYER, "base_uri": f"{BACKEND_URL}/key/"}),
        DeclareRequest("Quest"),
        DeploymentRequest(
            "QuestFactory",
            {
                "owner": DEPLOYER,
                "gem_contract": AddressOf("Gem"),
                "sbt_contract": AddressOf("SBT"),
                "quest_class_hash": ClassHashOf("Quest"),
            },
        ),
    ],
)


# %% Main
def main():
    load_dotenv()
    # Connects and checks the chain id before the event loop starts
    ctx = RuntimeContext.from_config(load_config())
    run(DEPLOY.run(ctx))
    logger.info("✅ All Setup Done")


# %% Run
if __name__ == "__main__":
    try:
        main()
    except DeploymentError as e:
        # Non-zero exit keeps dependent scripts (init_contracts) from running
        logger.error("❌ %s: %s", type(e).__name__, e)
        sys.exit(1)
