#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with the embedded beat scheduler, so one process
# runs both the translation sync jobs and the reminder sweep.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker --beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running (REDIS_URL)
#   - Environment variables must be set (.env file)
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker with beat."""
    print("=" * 60)
    print("AI Productivity Hub Worker")
    print("=" * 60)
    print()
    print("Starting worker + beat...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=2",
        "--queues=default,ai_tasks",
    ])


if __name__ == "__main__":
    main()
