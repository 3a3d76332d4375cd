from sentinel.main import run

run()
