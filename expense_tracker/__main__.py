"""Allow `python -m expense_tracker`."""

from expense_tracker.shell import main

main()
