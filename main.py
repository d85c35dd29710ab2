import uvicorn

from orderbot.config import PORT

if __name__ == "__main__":
    uvicorn.run("orderbot.main:app", host="0.0.0.0", port=PORT)
