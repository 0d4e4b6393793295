from pf_cli.main import run

run()
