"""Synchronizes the 802.1 project tracker with the spreadsheet, portal and mail archive."""

from argparse import ArgumentParser
from dataclasses import dataclass
from typing import Optional

from dotenv import dotenv_values, load_dotenv

from components.interfaces import Config
from components.runner import main


@dataclass
class Mode:  # pylint: disable=too-many-instance-attributes
    """Command-line arguments"""

    filepath: Optional[str] = None
    """Path to an Excel XLSX-format status spreadsheet"""
    people: bool = False
    """Create or update people from the spreadsheet's People tab"""
    task_groups: bool = False
    """Update the task groups from the spreadsheet"""
    update: bool = False
    """Update existing projects from the spreadsheet"""
    delete_existing: bool = False
    """Delete existing projects before creating new ones"""
    active: bool = False
    """Update from Active PARs on the development server"""
    sb: bool = False
    """Update from sponsor ballot notifications on the development server"""
    par_report: Optional[str] = None
    """Add projects listed in this YAML file from the PAR report"""
    mailserv: bool = False
    """Update from the mailing list archive"""
    drafts: bool = False
    """Scan the project archive for drafts and set the current draft number"""
    only: Optional[str] = None
    """Limit some actions to these project designations (comma separated)"""
    dryrun: bool = False
    """Do not change the database: just show what would have happened"""
    slackpost: bool = False
    """Post alerts for new events to the webhook"""
    debug: bool = False
    """Debug logging"""
    config: str = "config.yaml"
    """Configuration YAML file name"""


def build_parser() -> ArgumentParser:
    """Command-line parser whose destinations match ``Mode``'s fields."""
    parser = ArgumentParser(description="802.1 project tracker synchronizer")
    parser.add_argument("-c", "--config", default="config.yaml", help="Configuration YAML file name")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    parser.add_argument("-f", "--filepath", metavar="XLSX", help="Path to an Excel XLSX-format status spreadsheet")
    parser.add_argument("-p", "--people", action="store_true", help="Create or update people from the spreadsheet's People tab")
    parser.add_argument("-t", "--task-groups", action="store_true", help="Update the task groups from the spreadsheet")
    parser.add_argument("-u", "--update", action="store_true", help="Update existing projects from the spreadsheet")
    parser.add_argument("-x", "--delete-existing", action="store_true", help="Delete existing projects before creating new ones")
    parser.add_argument("-a", "--active", action="store_true", help="Update from Active PARs on the development server")
    parser.add_argument("-s", "--sb", action="store_true", help="Update from sponsor ballot notifications on the development server")
    parser.add_argument("-r", "--par-report", metavar="FILE", help="Add projects listed in this YAML file from the PAR report")
    parser.add_argument("-m", "--mailserv", action="store_true", help="Update from the mailing list archive")
    parser.add_argument("-D", "--drafts", action="store_true", help="Scan the project archive for drafts")
    parser.add_argument("-O", "--only", help="Limit some actions to these project designations")
    parser.add_argument("-n", "--dryrun", action="store_true", help="Do not change the database: just show what would have happened")
    parser.add_argument("-z", "--slackpost", action="store_true", help="Post alerts for new events to the webhook")
    return parser


if __name__ == "__main__":
    load_dotenv()
    for key in (keys := dotenv_values().keys()):
        print(f'Loaded "{key}"!')
    if not keys:
        print("Warning: No keys loaded, secrets must come from config.yaml.")
    run_mode = Mode(**vars(build_parser().parse_args()))
    main(Config(run_mode.config), run_mode)
