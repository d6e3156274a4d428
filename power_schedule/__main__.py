"""Entry point for running power-schedule as a module.

Usage: python -m power_schedule --action install --schedule-type shutdown --time 22:00
"""

from power_schedule.cli import main_entry

if __name__ == "__main__":
    main_entry()
