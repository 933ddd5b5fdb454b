from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List, Optional

from feedbeep.config import settings, validate_config
from feedbeep.exceptions import ArticleValidationError, FetchError
from feedbeep.feeds_config import DEFAULT_TOPICS, DEFAULT_LANGUAGE
from feedbeep.models.items import RawItem
from feedbeep.services.logger import logger, setup_logging
from feedbeep.workflows.pipeline import Pipeline, create_pipeline


class RunRequest(BaseModel):
    topics: List[str] = Field(default_factory=lambda: list(DEFAULT_TOPICS))
    language: str = DEFAULT_LANGUAGE


class ArticleTestRequest(BaseModel):
    article: Optional[RawItem] = None


def create_app(pipeline: Optional[Pipeline] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.pipeline is None:
            setup_logging(settings)
            validate_config(settings)
            app.state.pipeline = create_pipeline(settings)
            await app.state.pipeline.gate.store.init()
            logger.info("Pipeline ready")
        yield

    app = FastAPI(title="Feedbeep News Ingestion API", lifespan=lifespan)
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_pipeline(request: Request) -> Pipeline:
        return request.app.state.pipeline

    @app.post("/api/run")
    async def trigger_run(request: Request, req: Optional[RunRequest] = None):
        req = req or RunRequest()
        try:
            result = await get_pipeline(request).run_pipeline(req.topics, req.language)
        except FetchError as e:
            logger.error(f"Manual pipeline run failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        except Exception as e:
            logger.exception(f"Manual pipeline run crashed: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return {
            "success": True,
            "message": "Pipeline executed successfully",
            "result": result.model_dump(mode="json"),
        }

    @app.get("/api/status")
    async def get_status(request: Request):
        status = await get_pipeline(request).get_status()
        return status.model_dump(mode="json")

    @app.post("/api/articles/test")
    async def test_article(request: Request, req: Optional[ArticleTestRequest] = None):
        if req is None or req.article is None:
            raise HTTPException(status_code=400, detail="Article data is required")

        try:
            saved = await get_pipeline(request).process_single_article(req.article)
        except (ArticleValidationError, ValueError) as e:
            logger.warning(f"Rejected test article: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Single article processing failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        if saved is None:
            return {"success": True, "message": "Article already exists", "result": None}
        return {
            "success": True,
            "message": "Article processed successfully",
            "result": saved.model_dump(mode="json"),
        }

    @app.get("/api/metrics")
    async def get_metrics(request: Request):
        monitor = get_pipeline(request).monitor
        return {
            "metrics": monitor.get_metrics(),
            "insights": monitor.get_performance_insights(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("feedbeep.api:app", host="0.0.0.0", port=8000)
