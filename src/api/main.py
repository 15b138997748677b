from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.processing import router as processing_router

app = FastAPI(
    title="Meeting Summaries API",
    description="Post-meeting transcript processing and summarization",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(processing_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    from src.config import settings

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
