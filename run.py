import subprocess
import logging

# Setup basic logging for run.py
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

def run():
    logger.info("🚀 Starting Mensa Query API (Uvicorn)...")
    backend = subprocess.Popen(
        ["uvicorn", "mensa.main:app", "--reload", "--port", "8000"]
    )

    logger.info("✅ API is up! Access it here:")
    logger.info("   👉 API:  http://localhost:8000")
    logger.info("   👉 Docs: http://localhost:8000/docs")
    logger.info("Press Ctrl+C to stop.")

    try:
        backend.wait()
    except KeyboardInterrupt:
        logger.info("🛑 Stopping API...")
        backend.terminate()
        logger.info("Done.")

if __name__ == "__main__":
    run()
