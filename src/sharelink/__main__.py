from sharelink.cli import app

app(prog_name="sharelink")
