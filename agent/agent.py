"""
DMP Audience Agent — command-line entry
=======================================
Collects behavior tags, sends them to the collection server and reads back
the audience profile for this device.

PRIVACY: nothing is collected or sent while ad tracking is limited.

Usage:
    python agent.py --client-id 1234 --behavior int=sports --profile
"""

from dmp_agent.runner import run

if __name__ == "__main__":
    run()
