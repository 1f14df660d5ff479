"""
Run the ledger API.

    python -m ledger
"""
import uvicorn

from ledger.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
    )
