# FastAPI Application Redirect
# This file redirects to the actual app in the punch package

from punch.main import app

# This allows uvicorn to find the app when running from root directory:
# uvicorn main:app --host 127.0.0.1 --port 8080
