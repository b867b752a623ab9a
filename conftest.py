"""Configure test suite environment"""
import os
import sys

# Make period_tracker importable without installing the project
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

# Keep test output readable; must be set before period_tracker.utils.logging is imported
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "period_tracker_tests")
