import os

from dotenv import load_dotenv
from fastapi import FastAPI

from console.config import dlog, load_console_config
from console.webui.routes import create_console_router, install_error_handlers
from console.webui.state import init_console_state


load_dotenv()
app = FastAPI(title="FitCoach Admin Console")

config = load_console_config()
console_state = init_console_state(config)
dlog("console_state_ready", {"backend": config.api_url, "logged_in": console_state.token_store.is_logged_in()})

install_error_handlers(app)
app.include_router(create_console_router(console_state))


@app.on_event("shutdown")
def _shutdown() -> None:
    console_state.teardown()


if __name__ == "__main__":
    # Convenience for local runs: python fitcoach_admin.py --console-debug
    import uvicorn

    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "18080"))
    uvicorn.run("fitcoach_admin:app", host=host, port=port, reload=False)
