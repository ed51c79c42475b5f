from runvector.cli.app import app

app()
