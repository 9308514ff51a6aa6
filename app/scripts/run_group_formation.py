"""
Run Group Formation Script
Forms the trios for one date using the service-role client.
Meant to be called by cron or any external scheduler; safe to run repeatedly.

    python -m app.scripts.run_group_formation [--date YYYY-MM-DD]
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config import settings
from app.database.supabase_client import SupabaseClient
from app.modules.trios.formation import GroupFormationJob
from app.modules.trios.schemas import FormationErrorResponse
from app.modules.trios.service import TrioService
import logging

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Form the daily trios")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Formation date (YYYY-MM-DD); defaults to today in UTC",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    service = TrioService(SupabaseClient.get_service_client())
    try:
        result = GroupFormationJob(service).run(args.date)
    except Exception as e:
        logger.exception(f"Trio formation failed: {e}")
        print(json.dumps(FormationErrorResponse(details=str(e)).model_dump()))
        return 1
    logger.info(f"Trio formation finished: {result.message}")
    print(json.dumps(result.to_response()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
