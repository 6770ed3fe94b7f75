import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import anthropic
import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from .config import get_settings
from .connectors.n8n import N8nConnector
from .models import CompileRequest, HealthResponse, ToolCallRequest
from .planning.store import PlanStore
from .tools import TOOLS, TOOLS_VERSION, ToolDispatcher
from .workflow.analyzer import IntentAnalyzer
from .workflow.persister import PlanPersister
from .workflow.pipeline import compile_workflow

load_dotenv()

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Collaborators are created on first use so importing the app needs no credentials.
plan_store: Optional[PlanStore] = None
dispatcher: Optional[ToolDispatcher] = None
_http_client: Optional[httpx.AsyncClient] = None


def get_plan_store() -> PlanStore:
    global plan_store
    if plan_store is None:
        plan_store = PlanStore(settings.data_dir / "planning.db")
    return plan_store


def get_dispatcher() -> ToolDispatcher:
    global dispatcher, _http_client
    if dispatcher is None:
        client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            base_url=settings.anthropic_base_url,
            timeout=settings.completion_timeout,
        )
        analyzer = IntentAnalyzer(
            client,
            model=settings.analysis_model,
            max_tokens=settings.analysis_max_tokens,
        )
        n8n = None
        if N8nConnector.is_configured(settings):
            _http_client = httpx.AsyncClient(timeout=settings.n8n_timeout)
            n8n = N8nConnector.from_settings(settings, _http_client)
        dispatcher = ToolDispatcher(analyzer, get_plan_store(), n8n)
    return dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _http_client is not None:
        await _http_client.aclose()


app = FastAPI(
    title="ChatFlow API",
    description="MCP tools that turn chat requests into draft n8n workflows",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/api/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.get("/info")
def info():
    return {
        "name": app.title,
        "version": TOOLS_VERSION,
        "description": app.description,
        "tools": [{"name": tool["name"], "description": tool["description"]} for tool in TOOLS],
    }


# --- MCP tool endpoints ---

@app.get("/mcp/tools/list")
def list_tools():
    return {"tools": TOOLS, "version": TOOLS_VERSION, "timestamp": _timestamp()}


@app.post("/mcp/tools/call")
async def call_tool(request: ToolCallRequest):
    try:
        result = await get_dispatcher().call(request.tool_name, request.arguments)
    except Exception as e:
        logger.warning("Tool %s failed: %s", request.tool_name, e)
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(e), "timestamp": _timestamp()},
        )
    return {"success": True, "result": result, "timestamp": _timestamp()}


# --- Workflow endpoints ---

@app.post("/api/workflows/compile")
async def compile_workflow_endpoint(request: CompileRequest):
    """Compile a natural-language description into a draft workflow, streamed as SSE."""
    tools = get_dispatcher()
    persister = PlanPersister(get_plan_store()) if request.save else None

    async def event_stream():
        async for message in compile_workflow(
            request=request.description,
            analyzer=tools.analyzer,
            persister=persister,
        ):
            yield f"data: {json.dumps(message, default=str)}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@app.get("/api/workflows")
def list_workflows(status: str | None = None):
    return [wf.model_dump(mode="json") for wf in get_plan_store().list_workflows(status)]


@app.get("/api/workflows/{workflow_id}")
def get_workflow(workflow_id: str):
    wf = get_plan_store().get_workflow(workflow_id)
    if wf is None:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return wf.model_dump(mode="json")


@app.get("/api/tasks")
def list_tasks(status: str | None = None):
    return [task.model_dump(mode="json") for task in get_plan_store().list_tasks(status)]
