from quotepoll.cli.main import app

app(prog_name="quotepoll")
