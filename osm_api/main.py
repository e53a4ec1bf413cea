# osm_api/main.py
from . import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("osm_api.main:app", host="0.0.0.0", port=8000)
