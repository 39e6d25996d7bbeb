# stravaprobe/__main__.py
from .cli import main

main(prog_name="stravaprobe")
