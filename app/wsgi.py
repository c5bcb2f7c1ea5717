from app.careerforge import create_app

app = create_app()
