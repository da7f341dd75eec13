from hactdoc.cli import app

app(prog_name="hactdoc")
