"""
Cleanup Old Sessions Script
Deletes conversation sessions (and their messages and analytics, via cascade)
started more than N days ago. Meant for a nightly job.
"""

import argparse
import sys

from lumos.database.supabase_client import get_service_supabase
from lumos.modules.conversations.service import ConversationService
import logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Delete old conversation sessions")
    parser.add_argument("--days", type=int, default=30, help="Age in days (default: 30)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        ConversationService(get_service_supabase()).cleanup_old_sessions(args.days)
    except Exception as e:
        logger.error(f"Error during session cleanup: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
