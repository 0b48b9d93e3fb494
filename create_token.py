"""Print a bearer token for local testing.

Usage: python create_token.py <username> [lifetime_days]
"""
import sys

from farm_platform_api.app.core.security import create_access_token

username = sys.argv[1] if len(sys.argv) > 1 else "farmer"
days = int(sys.argv[2]) if len(sys.argv) > 2 else 30
token = create_access_token({"sub": username}, expires_delta=days * 24 * 60 * 60)
print(token)
