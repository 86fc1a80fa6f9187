"""Engine layer: AI events, the per-tick AI system, and the scripted session driver.

``AISystem`` and ``SimulationDriver`` are imported from their modules
directly; the AI action handlers depend on ``horde.engine.events``.
"""

from horde.engine.events import AgentAttack, AgentRemoved, AgentSpawned, AIEvent, CombatEffect, DifficultyChanged

__all__ = ["AIEvent", "AgentAttack", "AgentRemoved", "AgentSpawned", "CombatEffect", "DifficultyChanged"]
