import uvicorn
from config import ApplicationConfig
from src.api.app import create_app

# Served by uvicorn; tables are created on startup when DB_CREATE_TABLES is set
app = create_app(ApplicationConfig)

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=ApplicationConfig.API_RELOAD,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
