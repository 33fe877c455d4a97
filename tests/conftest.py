import os
import sys

# Set required env vars once at the top before any handler imports
os.environ["ANTHROPIC_API_KEY"] = "test-key"
os.environ["LEADS_TABLE_NAME"] = "test-leads"
os.environ["LAWYERS_TABLE_NAME"] = "test-lawyers"
os.environ["FIRM_EMAIL"] = "intake@firm.test"
os.environ["FROM_EMAIL"] = "noreply@firm.test"
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

# Lambda sources are flat directories, not packages
ROOT = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, os.path.join(ROOT, "leaddesk-dashboard"))
sys.path.insert(0, os.path.join(ROOT, "leaddesk-ai"))
