from .cli import app

app(prog_name="context-analyzer")
