"""Event factory: builds attack events and their blue team companions.

All randomness comes from the ``random.Random`` passed in, so a seeded source
reproduces the same narrative.
"""

import random
from datetime import datetime

from ..models import (
    BlueTeamResponse,
    EventStatus,
    EventType,
    RedTeamAction,
    Severity,
    SimulationEvent,
)
from .scenarios import Phase

SOURCE_IPS = [
    "203.0.113.45", "198.51.100.23", "192.0.2.156", "203.0.113.78",
    "185.220.101.42", "89.248.171.34", "45.142.214.123", "194.147.85.67",
    "91.240.118.92", "178.128.83.165", "159.89.214.31", "167.172.44.89",
]

RED_TEAM_TOOLS = [
    "Metasploit", "Cobalt Strike", "PowerShell Empire", "Custom Malware",
    "Mimikatz", "BloodHound", "Nmap", "Burp Suite", "Responder", "Impacket",
    "Rubeus", "SharpHound", "CrackMapExec", "Evil-WinRM", "Chisel", "Ligolo",
]

NEXT_ACTIONS = [
    "Establish Persistence", "Escalate Privileges", "Lateral Movement",
    "Data Exfiltration", "Deploy Backdoor", "Credential Harvesting",
    "Network Reconnaissance", "Defense Evasion",
]

DETECTION_METHODS = [
    "SIEM Correlation Engine", "EDR Behavioral Analysis", "Network Traffic Monitoring",
    "User Behavior Analytics", "Threat Intelligence Feed", "Anomaly Detection System",
    "Signature-based Detection", "Machine Learning Model", "Honeypot Alert",
    "DNS Monitoring", "Email Security Gateway", "Web Application Firewall",
    "Deception Technology", "File Integrity Monitoring", "Process Monitoring",
    "Memory Analysis", "Network Segmentation Alert", "Zero Trust Architecture",
    "Threat Hunting Platform", "Security Orchestration", "Incident Response Platform",
]

ANALYSTS = [
    "Alice Johnson (Senior SOC Analyst)", "Bob Smith (Incident Response Lead)",
    "Carol Davis (Threat Hunter)", "David Wilson (Security Engineer)",
    "Emma Brown (SOC Manager)", "Frank Miller (Forensics Specialist)",
    "Grace Lee (Malware Analyst)", "Henry Chen (Network Security Analyst)",
    "Isabella Rodriguez (Cyber Threat Intelligence)", "Jack Thompson (Security Architect)",
    "Kate Williams (Digital Forensics)", "Liam O'Connor (Penetration Tester)",
    "Maya Patel (Security Operations)", "Nathan Kim (Incident Commander)",
]

CONTAINMENT_ACTIONS = [
    "Automatically isolated affected endpoint", "Blocked malicious IP at perimeter firewall",
    "Disabled compromised user account", "Updated security signatures",
    "Deployed additional monitoring agents", "Initiated automated incident response",
    "Collected forensic artifacts", "Notified security team via SOAR platform",
    "Applied security patches", "Quarantined suspicious files",
    "Reset user credentials", "Updated threat intelligence feeds",
    "Activated network segmentation", "Deployed honeypots in affected area",
    "Initiated threat hunting procedures", "Escalated to incident response team",
    "Implemented additional access controls", "Enhanced monitoring on critical assets",
    "Coordinated with external threat intelligence", "Activated backup systems",
]

MITIGATION_ACTIONS = [
    "Threat successfully contained and neutralized by automated response",
    "Malicious processes terminated and system restored to clean state",
    "Network access revoked and security policies updated",
    "Affected systems isolated and restored from verified clean backups",
    "Security patches applied and vulnerability remediated",
    "Enhanced monitoring deployed and threat signatures updated",
    "Incident fully documented and lessons learned captured",
    "User security awareness training scheduled for affected department",
    "Security controls strengthened based on attack vector",
    "Threat intelligence updated with new indicators of compromise",
    "Multi-factor authentication enforced on compromised accounts",
    "Network segmentation rules updated to prevent lateral movement",
    "Endpoint detection and response capabilities enhanced",
    "Threat hunting rules deployed to detect similar attacks",
    "Security incident response playbook updated with new procedures",
    "Vulnerability assessment scheduled for affected systems",
    "Security awareness campaign launched organization-wide",
    "Third-party security vendor engaged for additional analysis",
]

MITIGATION_TOOLS = [
    "SOAR Playbook", "EDR Auto-Response", "SIEM Correlation", "Firewall Rules",
    "Endpoint Isolation", "Patch Management", "Backup Restoration", "Account Lockout",
    "DNS Blocking", "Email Quarantine", "Network Segmentation", "Threat Intelligence",
    "Deception Technology", "Zero Trust Controls", "Incident Response Platform",
    "Security Orchestration", "Automated Remediation", "Threat Hunting Platform",
]

# Inclusive bounds in seconds; critical incidents are answered fastest
RESPONSE_TIME_RANGES = {
    Severity.CRITICAL: (10, 54),
    Severity.HIGH: (20, 109),
    Severity.MEDIUM: (30, 179),
    Severity.LOW: (45, 284),
}

ATTACK_SUCCESS_RATE = 0.75
FALSE_POSITIVE_RATE = 0.02


def response_time_for(severity: Severity, rng: random.Random) -> int:
    low, high = RESPONSE_TIME_RANGES.get(severity, RESPONSE_TIME_RANGES[Severity.HIGH])
    return rng.randint(low, high)


def build_attack_event(
    event_id: str,
    phase: Phase,
    scenario_name: str,
    phase_instance_id: str,
    rng: random.Random,
    now: datetime,
    metadata: dict | None = None,
) -> SimulationEvent:
    """Instantiate one phase template as an active attack event."""
    return SimulationEvent(
        id=event_id,
        timestamp=now,
        type=EventType.ATTACK,
        severity=phase.severity,
        status=EventStatus.ACTIVE,
        title=f"{scenario_name}: {phase.title}",
        description=phase.description,
        attack_vector=phase.attack_vector,
        target_system=phase.target_system,
        source_ip=rng.choice(SOURCE_IPS),
        destination_ip=f"10.0.{rng.randrange(255)}.{rng.randrange(255)}",
        mitre_technique=phase.mitre_technique,
        phase_instance_id=phase_instance_id,
        red_team_action=RedTeamAction(
            id=f"red-{event_id}",
            technique=phase.mitre_technique,
            tool=rng.choice(RED_TEAM_TOOLS),
            target=phase.target_system,
            success=rng.random() < ATTACK_SUCCESS_RATE,
            detection_probability=phase.detection_probability,
            impact=phase.severity,
            next_actions=list(NEXT_ACTIONS),
        ),
        metadata=dict(metadata or {}),
    )


def _companion(attack: SimulationEvent, **overrides) -> SimulationEvent:
    fields = {
        "timestamp": attack.timestamp,
        "severity": attack.severity,
        "target_system": attack.target_system,
        "attack_vector": attack.attack_vector,
        "source_ip": attack.source_ip,
        "destination_ip": attack.destination_ip,
        "mitre_technique": attack.mitre_technique,
        "phase_instance_id": attack.phase_instance_id,
        "metadata": {**attack.metadata, "attack_event_id": attack.id},
    }
    fields.update(overrides)
    return SimulationEvent(**fields)


def build_detection_event(attack: SimulationEvent, rng: random.Random, now: datetime) -> SimulationEvent:
    """Detection companion carrying the synthesized blue team response."""
    containment_count = rng.randint(2, 5)
    return _companion(
        attack,
        id=f"response-{attack.id}",
        timestamp=now,
        type=EventType.DETECTION,
        status=EventStatus.DETECTED,
        title=f"DETECTED: {attack.title}",
        description=f"SOC automated detection: {attack.description}",
        blue_team_response=BlueTeamResponse(
            id=f"blue-{attack.id}",
            detection_method=rng.choice(DETECTION_METHODS),
            response_time=response_time_for(attack.severity, rng),
            analyst=rng.choice(ANALYSTS),
            containment_actions=rng.sample(CONTAINMENT_ACTIONS, containment_count),
            effectiveness=rng.randint(75, 99),
            false_positive=rng.random() < FALSE_POSITIVE_RATE,
        ),
    )


def build_mitigation_event(attack: SimulationEvent, rng: random.Random, now: datetime) -> SimulationEvent:
    """Mitigation companion with a remediation narrative."""
    action = rng.choice(MITIGATION_ACTIONS)
    tool = rng.choice(MITIGATION_TOOLS)
    return _companion(
        attack,
        id=f"mitigation-{attack.id}",
        timestamp=now,
        type=EventType.MITIGATION,
        status=EventStatus.MITIGATED,
        title=f"MITIGATED: {attack.title}",
        description=f"{action} using {tool}.",
    )
