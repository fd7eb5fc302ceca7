from scrambletower.app import run

run()
