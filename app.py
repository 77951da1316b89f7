# Entry point: python app.py  (or: flask --app app run)
from src.workorder_system.workorder_system.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG", False)), host="0.0.0.0", port=5000)
