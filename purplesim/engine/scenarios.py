"""Scenario catalogue: the attack scenarios a chain can be built from.

Each scenario is an ordered list of phases. Phase delays are relative to the
chain start, not to the previous phase.
"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from ..models import Severity


@dataclass(frozen=True)
class Phase:
    """Template for one attack stage and its possible detection/mitigation."""
    title: str
    description: str
    attack_vector: str
    mitre_technique: str
    severity: Severity
    target_system: str
    delay: float  # seconds from chain start
    detection_probability: float  # 0.0 - 1.0

    def __post_init__(self):
        if not 0.0 <= self.detection_probability <= 1.0:
            raise ValueError(f"detection_probability out of range for phase {self.title!r}")
        if self.delay < 0:
            raise ValueError(f"negative delay for phase {self.title!r}")


@dataclass(frozen=True)
class Scenario:
    name: str
    phases: tuple[Phase, ...]

    def __post_init__(self):
        if not self.phases:
            raise ValueError(f"scenario {self.name!r} has no phases")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "phase_count": len(self.phases),
            "phases": [
                {
                    "title": p.title,
                    "description": p.description,
                    "attack_vector": p.attack_vector,
                    "mitre_technique": p.mitre_technique,
                    "severity": p.severity.value,
                    "target_system": p.target_system,
                    "delay": p.delay,
                    "detection_probability": p.detection_probability,
                }
                for p in self.phases
            ],
        }


LOW, MEDIUM, HIGH, CRITICAL = Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL


SCENARIOS: tuple[Scenario, ...] = (
    Scenario("Advanced Spear Phishing Campaign", (
        Phase("OSINT Reconnaissance",
              "Red team gathering employee information from social media and public sources",
              "Open Source Intelligence", "T1589.002", LOW, "External Infrastructure", 0.0, 0.2),
        Phase("Targeted Phishing Email",
              "Highly personalized phishing email sent to C-level executives",
              "Spear Phishing Link", "T1566.002", HIGH, "Email Server", 12.0, 0.75),
        Phase("Credential Harvesting",
              "Fake login page capturing executive credentials",
              "Credential Harvesting", "T1056.003", CRITICAL, "Web Application", 25.0, 0.85),
    )),
    Scenario("Ransomware Deployment", (
        Phase("Initial Compromise",
              "Malicious macro-enabled document executed by user",
              "Malicious File", "T1204.002", HIGH, "Admin Workstation", 0.0, 0.88),
        Phase("Ransomware Encryption",
              "Files being encrypted across network shares",
              "Data Encrypted for Impact", "T1486", CRITICAL, "File Server", 18.0, 0.98),
        Phase("Ransom Note Deployment",
              "Ransom notes deployed across compromised systems",
              "Defacement", "T1491.001", CRITICAL, "Multiple Systems", 30.0, 1.0),
    )),
    Scenario("Supply Chain Attack", (
        Phase("Third-Party Software Compromise",
              "Malicious update pushed through compromised software vendor",
              "Supply Chain Compromise", "T1195.002", CRITICAL, "Software Distribution", 0.0, 0.65),
        Phase("Backdoor Installation",
              "Persistent backdoor installed via compromised update",
              "Server Software Component", "T1505.003", CRITICAL, "Web Server", 20.0, 0.7),
    )),
    Scenario("Insider Threat Activity", (
        Phase("Privilege Abuse",
              "Authorized user accessing files outside normal scope",
              "Valid Accounts", "T1078.002", MEDIUM, "File Server", 0.0, 0.6),
        Phase("Data Staging",
              "Large amounts of sensitive data being copied to external drive",
              "Data Staged", "T1074.001", HIGH, "Workstation", 15.0, 0.85),
    )),
    Scenario("Advanced Persistent Threat", (
        Phase("Watering Hole Attack",
              "Legitimate website compromised to serve malware to visitors",
              "Drive-by Compromise", "T1189", HIGH, "Web Browser", 0.0, 0.7),
        Phase("Living off the Land",
              "PowerShell used for reconnaissance and lateral movement",
              "PowerShell", "T1059.001", MEDIUM, "Domain Controller", 22.0, 0.8),
        Phase("Golden Ticket Attack",
              "Forged Kerberos tickets used for domain persistence",
              "Golden Ticket", "T1558.001", CRITICAL, "Domain Controller", 35.0, 0.9),
    )),
    Scenario("Cloud Infrastructure Attack", (
        Phase("Cloud Enumeration",
              "Automated scanning of cloud resources and permissions",
              "Cloud Service Discovery", "T1526", MEDIUM, "Cloud Services", 0.0, 0.75),
        Phase("IAM Privilege Escalation",
              "Exploiting misconfigured IAM policies for privilege escalation",
              "Cloud Administration Command", "T1580", HIGH, "Cloud Services", 18.0, 0.85),
    )),
    Scenario("Network Lateral Movement", (
        Phase("Network Discovery",
              "Automated port scanning across internal network segments",
              "Network Service Scanning", "T1046", MEDIUM, "Internal Network", 0.0, 0.9),
        Phase("SMB Exploitation",
              "Exploiting SMB vulnerabilities for lateral movement",
              "Exploitation of Remote Services", "T1210", HIGH, "File Server", 16.0, 0.85),
        Phase("Pass-the-Hash Attack",
              "Using stolen password hashes for authentication",
              "Pass the Hash", "T1550.002", HIGH, "Multiple Systems", 28.0, 0.88),
    )),
    Scenario("Database Compromise", (
        Phase("SQL Injection Attack",
              "Malicious SQL queries attempting to extract sensitive data",
              "Exploit Public-Facing Application", "T1190", HIGH, "Database Server", 0.0, 0.92),
        Phase("Database Enumeration",
              "Systematic enumeration of database schemas and tables",
              "Data from Information Repositories", "T1213.002", MEDIUM, "Database Server", 14.0, 0.8),
    )),
    Scenario("Email Security Breach", (
        Phase("Email Account Takeover",
              "Compromised email account used for internal phishing",
              "Email Account", "T1078.003", HIGH, "Email Server", 0.0, 0.75),
        Phase("Business Email Compromise",
              "Fraudulent wire transfer request sent from compromised executive account",
              "Phishing", "T1566.001", CRITICAL, "Email Server", 20.0, 0.7),
    )),
    Scenario("Cryptocurrency Mining Attack", (
        Phase("Cryptojacking Deployment",
              "Unauthorized cryptocurrency mining software installed",
              "Resource Hijacking", "T1496", MEDIUM, "Web Server", 0.0, 0.85),
    )),
    Scenario("VPN Infrastructure Attack", (
        Phase("VPN Credential Stuffing",
              "Automated login attempts using leaked credential databases",
              "Brute Force", "T1110.004", HIGH, "VPN Gateway", 0.0, 0.9),
        Phase("VPN Tunnel Hijacking",
              "Successful compromise of VPN session for remote access",
              "Remote Services", "T1021.005", CRITICAL, "VPN Gateway", 25.0, 0.95),
    )),
    Scenario("Backup System Compromise", (
        Phase("Backup Enumeration",
              "Scanning for accessible backup files and repositories",
              "Data from Network Shared Drive", "T1039", MEDIUM, "Backup Server", 0.0, 0.7),
        Phase("Backup Deletion",
              "Critical backup files being deleted to prevent recovery",
              "Inhibit System Recovery", "T1490", CRITICAL, "Backup Server", 18.0, 0.98),
    )),
    Scenario("Mobile Device Attack", (
        Phase("Mobile Malware Installation",
              "Malicious app installed on corporate mobile device",
              "Drive-by Compromise", "T1189", MEDIUM, "Mobile Device", 0.0, 0.6),
        Phase("Corporate Data Access",
              "Malware accessing corporate email and documents on mobile device",
              "Data from Local System", "T1005", HIGH, "Mobile Device", 15.0, 0.8),
    )),
    Scenario("IoT Device Compromise", (
        Phase("IoT Device Scanning",
              "Scanning for vulnerable IoT devices on corporate network",
              "Network Service Scanning", "T1046", LOW, "IoT Devices", 0.0, 0.5),
        Phase("IoT Botnet Formation",
              "Compromised IoT devices being recruited into botnet",
              "Exploitation for Client Execution", "T1203", MEDIUM, "IoT Devices", 20.0, 0.75),
    )),
    Scenario("DNS Hijacking Attack", (
        Phase("DNS Cache Poisoning",
              "Malicious DNS responses injected to redirect traffic",
              "Domain Generation Algorithms", "T1568.002", HIGH, "DNS Server", 0.0, 0.85),
        Phase("Traffic Redirection",
              "Corporate traffic being redirected to malicious servers",
              "Traffic Signaling", "T1205.001", CRITICAL, "Network Infrastructure", 12.0, 0.9),
    )),
    Scenario("Zero-Day Exploitation", (
        Phase("Zero-Day Discovery",
              "Previously unknown vulnerability being exploited",
              "Exploitation for Client Execution", "T1203", CRITICAL, "Web Application", 0.0, 0.4),
        Phase("Payload Deployment",
              "Advanced persistent threat payload deployed via zero-day",
              "User Execution", "T1204.002", CRITICAL, "Multiple Systems", 15.0, 0.7),
    )),
    Scenario("Social Engineering Campaign", (
        Phase("Pretexting Phone Call",
              "Attacker impersonating IT support to gather credentials",
              "Phishing for Information", "T1598.004", MEDIUM, "Human Factor", 0.0, 0.3),
        Phase("Physical Badge Cloning",
              "Employee access badge cloned for unauthorized physical access",
              "Hardware Additions", "T1200", HIGH, "Physical Security", 30.0, 0.8),
    )),
    Scenario("API Security Breach", (
        Phase("API Enumeration",
              "Automated scanning of API endpoints for vulnerabilities",
              "Network Service Scanning", "T1046", MEDIUM, "API Gateway", 0.0, 0.8),
        Phase("API Key Theft",
              "Sensitive API keys extracted from exposed configuration",
              "Unsecured Credentials", "T1552.001", HIGH, "API Gateway", 16.0, 0.85),
    )),
    Scenario("Container Escape Attack", (
        Phase("Container Vulnerability Scan",
              "Scanning containerized applications for escape vulnerabilities",
              "Exploitation for Privilege Escalation", "T1068", MEDIUM, "Container Platform", 0.0, 0.75),
        Phase("Container Breakout",
              "Successful escape from container to host system",
              "Escape to Host", "T1611", CRITICAL, "Container Platform", 22.0, 0.9),
    )),
    Scenario("Lateral Movement via Remote Desktop", (
        Phase("RDP Brute Force",
              "Password spraying against exposed remote desktop services",
              "Password Spraying", "T1110.003", MEDIUM, "Admin Workstation", 0.0, 0.85),
        Phase("RDP Lateral Movement",
              "Interactive lateral movement between servers over RDP",
              "Remote Desktop Protocol", "T1021.001", HIGH, "File Server", 14.0, 0.8),
        Phase("Credential Dumping",
              "LSASS memory dumped to extract cached domain credentials",
              "OS Credential Dumping", "T1003.001", CRITICAL, "Domain Controller", 26.0, 0.9),
    )),
)


def list_scenarios() -> list[Scenario]:
    return list(SCENARIOS)


def get_scenario(name: str) -> Optional[Scenario]:
    for scenario in SCENARIOS:
        if scenario.name == name:
            return scenario
    return None


def pick_random_scenario(rng: random.Random, scenarios: Optional[Sequence[Scenario]] = None) -> Scenario:
    """Uniform pick over the catalogue (or the supplied subset)."""
    pool = scenarios if scenarios is not None else SCENARIOS
    if not pool:
        raise ValueError("scenario catalogue is empty")
    return pool[rng.randrange(len(pool))]
