"""
Player-facing message text. Hosts render these verbatim.
"""
from __future__ import annotations

from .schemas import Party

NEW_MATCH = "New match started! Press 'Start New Round' to begin."

_NAMES = {Party.PLAYER: "Player", Party.AI: "AI"}

_TURN = {
    Party.PLAYER: "Your turn! Throw the slammer.",
    Party.AI: "AI's turn... the AI is thinking.",
}


def party_name(party: Party) -> str:
    return _NAMES[party]


def turn_message(party: Party) -> str:
    return _TURN[party]


def flipped_message(party: Party, count: int) -> str:
    return f"{party_name(party)} flipped {count} pogs!"


def round_won_message(party: Party) -> str:
    return f"{party_name(party)} wins the round!"


def match_won_message(party: Party) -> str:
    return f"{party_name(party)} wins the match!"


def no_pogs_message(player_total: int, ai_total: int) -> str:
    if player_total > ai_total:
        return "AI has no pogs left! Player wins the match by default!"
    if ai_total > player_total:
        return "Player has no pogs left! AI wins the match by default!"
    return "Both players ran out of pogs! It's a draw!"
