from app.main import app
import os

if __name__ == "__main__":
    # Serves the health, scrape trigger and run report endpoints. PORT comes
    # from the hosting environment and defaults to 8080.
    port = int(os.environ.get("PORT", 8080))
    app.run(host=os.environ.get("HOST", "0.0.0.0"), port=port)
