"""power-schedule - daily scheduled shutdown or restart.

Installs a small native scheduled action (Windows Task Scheduler task,
macOS launchd daemon, Linux systemd service + timer) that runs the trigger
script at a chosen time of day to shut down or restart the machine.

Components:
    - validator: parameter validation and interactive fallback
    - platform / paths: host detection and install target resolution
    - artifacts: in-place editing of the scheduler configuration files
    - provisioner: trigger script installation
    - backends / controller: native scheduler registration
    - orchestrator: sequencing and error reporting
"""

__version__ = "0.1.0"
