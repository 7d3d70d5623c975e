from hatchbot.cli import app

app()
