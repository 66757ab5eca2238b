"""
Shell Safety

Tiered classification of shell commands run by the eval tool, plus output
cleanup before results are handed back to a model.

Tiers, from least to most restrictive:

    allowed       read-only inspection commands
    safe_write    non-destructive writes
    confirmation  destructive or unknown commands (need an authorizer)
    blocked       never executed
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List


class SafetyTier(str, Enum):
    ALLOWED = "allowed"
    SAFE_WRITE = "safe_write"
    CONFIRMATION = "confirmation"
    BLOCKED = "blocked"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = [SafetyTier.ALLOWED, SafetyTier.SAFE_WRITE,
               SafetyTier.CONFIRMATION, SafetyTier.BLOCKED]


READ_ONLY_COMMANDS = {
    'cat', 'head', 'tail', 'wc', 'file', 'stat', 'grep', 'rg', 'find',
    'which', 'ls', 'tree', 'du', 'df', 'pwd', 'echo', 'printf', 'true',
    'date', 'env', 'printenv', 'uname', 'hostname', 'whoami', 'id',
    'sort', 'uniq', 'cut', 'diff', 'basename', 'dirname', 'realpath',
    'git status', 'git log', 'git diff', 'git show', 'git branch',
    'python --version', 'python3 --version', 'pip list', 'pip show',
}

SAFE_WRITE_COMMANDS = {
    'mkdir', 'touch', 'cp', 'tee', 'ln',
    'git add', 'git commit', 'git stash',
}

CONFIRMATION_COMMANDS = {
    'rm', 'rmdir', 'mv', 'chmod', 'chown', 'kill', 'pkill', 'truncate',
    'git reset', 'git clean', 'git checkout', 'git push',
    'pip install', 'pip uninstall',
}

BLOCKED_COMMANDS = {
    'sudo', 'su', 'dd', 'mkfs', 'fdisk', 'shutdown', 'reboot', 'poweroff',
    'halt', 'eval', 'exec', 'passwd', 'useradd', 'userdel', 'mount',
    'umount', 'crontab', 'iptables',
}

BLOCKED_PATTERNS = [
    r'\|\s*(ba|z)?sh\b',   # pipe into a shell
    r'\$\(',               # command substitution
    r'`[^`]*`',            # backticks
    r'>\s*/dev/sd',
    r'>\s*/(etc|proc|sys)/',
    r'\brm\s+-[a-z]*r[a-z]*\s+/(\s|$)',
    r':\(\)\s*\{',         # fork bomb
]

# Commands that run another command given as their arguments
WRAPPER_COMMANDS = {
    'env', 'nohup', 'time', 'nice', 'ionice', 'timeout', 'xargs',
    'stdbuf', 'command', 'builtin',
}

# Separators that chain independent commands; a lone & backgrounds the left
# side and starts the right. Redirections like 2>&1 and &> are not separators.
_CHAIN_SPLIT = re.compile(r'&&|\|\||\|&|;|\n|(?<![<>&])&(?![>&])')
# Wrapper options, VAR=value assignments and numeric arguments (nice -n 10, timeout 5s)
_WRAPPER_ARG = re.compile(r'^(-.*|[A-Za-z_][A-Za-z0-9_]*=.*|\d+(\.\d+)?[smhd]?)$')
_ANSI = re.compile(r'\x1b\[[0-9;]*[A-Za-z]')


@dataclass(frozen=True)
class Classification:
    tier: SafetyTier
    reason: str

    @property
    def blocked(self) -> bool:
        return self.tier == SafetyTier.BLOCKED

    @property
    def needs_authorization(self) -> bool:
        return self.tier == SafetyTier.CONFIRMATION


def _unwrap(parts: List[str]) -> List[str]:
    """Strip leading assignments and wrappers down to the command they run."""
    rest = list(parts)
    while rest and (rest[0] in WRAPPER_COMMANDS or "=" in rest[0]):
        rest = rest[1:]
        while rest and _WRAPPER_ARG.match(rest[0]):
            rest = rest[1:]
    return rest


def _classify_segment(segment: str) -> Classification:
    # A bare wrapper (plain `env`, `time`) is judged as itself
    parts = _unwrap(segment.split()) or segment.split()
    base = parts[0]
    pair = f"{parts[0]} {parts[1]}" if len(parts) > 1 else ""

    if base in BLOCKED_COMMANDS:
        return Classification(SafetyTier.BLOCKED, f'Command "{base}" is never allowed')
    for tier, names in ((SafetyTier.ALLOWED, READ_ONLY_COMMANDS),
                        (SafetyTier.SAFE_WRITE, SAFE_WRITE_COMMANDS),
                        (SafetyTier.CONFIRMATION, CONFIRMATION_COMMANDS)):
        if pair in names:
            return Classification(tier, f'{tier.value}: {pair}')
        if base in names:
            return Classification(tier, f'{tier.value}: {base}')
    return Classification(SafetyTier.CONFIRMATION, f'Unknown command "{base}"')


def classify_command(command: str) -> Classification:
    """Classify a command line; chained commands take the strictest tier."""
    stripped = (command or "").strip()
    if not stripped:
        return Classification(SafetyTier.BLOCKED, 'Empty command')

    for pattern in BLOCKED_PATTERNS:
        if re.search(pattern, stripped):
            return Classification(SafetyTier.BLOCKED, f'Blocked pattern: {pattern}')

    segments: List[str] = []
    for chunk in _CHAIN_SPLIT.split(stripped):
        # Each side of a plain pipe is a command of its own
        segments.extend(s.strip() for s in chunk.split('|') if s.strip())

    if not segments:
        return Classification(SafetyTier.BLOCKED, 'Empty command')

    verdicts = [_classify_segment(s) for s in segments]
    return max(verdicts, key=lambda c: c.tier.rank)


def sanitize_output(output: str, max_lines: int = 200, max_chars: int = 8000) -> str:
    """Strip ANSI codes and cap the size of captured command output."""
    clean = _ANSI.sub('', output or '')

    lines = clean.split('\n')
    if len(lines) > max_lines:
        dropped = len(lines) - max_lines
        clean = '\n'.join(lines[:max_lines]) + f"\n... ({dropped} more lines truncated)"

    if len(clean) > max_chars:
        clean = clean[:max_chars] + f"\n... (truncated at {max_chars} characters)"

    return clean
