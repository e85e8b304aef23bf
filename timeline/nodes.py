"""Normalization rule definitions.

This module defines the ordered rule tables used to turn free-text status,
motion and PAR report strings into canonical labels. Order matters: the
recirculation rules must precede the plain ballot rules, and the
conditional rules must precede their unconditional counterparts.
"""

import re

from timeline.models import RuleTable, StatusRule


def _ballot_rules() -> list[StatusRule]:
    """Ballot and draft rules shared by the status and motion tables."""
    return [
        StatusRule(re.compile(r"WG\s*[bB]allot[- ]*[rR]ecirc"), "WgBallotRecirc"),
        StatusRule(re.compile(r"WG\s*[bB]allot$"), "WgBallot"),
        StatusRule(re.compile(r"TG\s*[bB]allot[- ]*[rR]ecirc"), "TgBallotRecirc"),
        StatusRule(re.compile(r"TG\s*[bB]allot$"), "TgBallot"),
        StatusRule(re.compile(r"Editor"), "EditorsDraft"),
        StatusRule(
            re.compile(r"Sponsor\s*[bB]allot[- ]*[cC]ond"), "SponsorBallotCond"
        ),
        StatusRule(re.compile(r"Sponsor\s*[bB]allot$"), "SponsorBallot"),
        StatusRule(re.compile(r"PAR\s*[dD]evelop"), "ParDevelopment"),
    ]


def create_status_table() -> RuleTable:
    """Rules for the spreadsheet "Status" column."""
    rules = _ballot_rules()
    rules.append(StatusRule(re.compile(r"PAR\s*[aA]pproved"), "ParApproved"))
    return RuleTable("status", rules)


def create_motion_table() -> RuleTable:
    """Rules for the "Last Motion" and "Next Action" columns."""
    rules = _ballot_rules()
    rules.extend([
        StatusRule(re.compile(r"PAR\s*[aA]pproval"), "ParApproval"),
        StatusRule(re.compile(r"PAR\s*[mM]od"), "ParMod"),
        StatusRule(re.compile(r"RevCom\s*[-*]\s*[cC]ond"), "RevComCond"),
        StatusRule(re.compile(r"RevCom$"), "RevCom"),
        StatusRule(re.compile(r"[wW]ithdraw"), "Withdrawal"),
    ])
    return RuleTable("motion", rules)


def create_par_report_table() -> RuleTable:
    """Rules for the status column of the portal's PAR report.

    The agenda rule has no fixed label: the committee word ("NesCom",
    "RevCom") becomes the label and the agenda date becomes an event.
    """
    return RuleTable("par_report", [
        StatusRule(re.compile(r"^Complete$"), "Approved"),
        StatusRule(re.compile(r"^WG Draft Development$"), "ParApproved"),
        # Invitations go out while the WG recirculation is still running
        StatusRule(
            re.compile(r"^Sponsor Ballot: Invitation$"), "WgBallotRecirc"
        ),
        StatusRule(re.compile(r"Sponsor Ballot"), "SponsorBallot"),
        StatusRule(
            re.compile(r"(?P<committee>\w*Com) Agenda (?P<date>\d\d-\w+-\d{4})"),
            "Agenda",
            metadata={"agenda": True},
        ),
    ])


STATUS_RULES = create_status_table()
MOTION_RULES = create_motion_table()
PAR_REPORT_RULES = create_par_report_table()
