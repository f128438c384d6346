"""Server startup - builds the real app with error handling."""
import os
import sys
import traceback
from pathlib import Path

port = int(os.environ.get("PORT", "10000"))
import_error = None

src_dir = Path(__file__).parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

# Try to build the real app
try:
    from api.server import create_app
    app = create_app()
    print("[start.py] Real app created successfully", flush=True)
except Exception as e:
    import_error = f"{type(e).__name__}: {e}"
    print(f"[start.py] STARTUP FAILED: {import_error}\n{traceback.format_exc()}", flush=True)
    # Fallback to minimal app that shows the error
    from fastapi import FastAPI
    from fastapi.responses import PlainTextResponse
    app = FastAPI()
    err_msg = import_error  # capture in closure

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return f"Startup error:\n{err_msg}"

    @app.get("/api/health", response_class=PlainTextResponse)
    async def health():
        return f"UNHEALTHY - Startup error:\n{err_msg}"

if __name__ == "__main__":
    import uvicorn
    print(f"[start.py] Starting on port {port}", flush=True)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
