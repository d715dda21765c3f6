from odootools.cli.main import app

app(prog_name="odootools")
