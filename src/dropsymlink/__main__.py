from dropsymlink.ui.cli import run

run()
