from gridder.cli import app

app()
