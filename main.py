from dotenv import load_dotenv
# Load environment variables first to ensure all configs are set
load_dotenv()

from workdesk import create_app


app = create_app()

if __name__ == "__main__":
    app.run(port=5001)
