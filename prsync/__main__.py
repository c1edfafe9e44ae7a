from prsync.main import run

run()
