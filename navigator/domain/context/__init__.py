# This module handles context engineering

# +---------------------+
# |      Memory         |   (Persistent, append-only, project scoped)
# |---------------------|
# | User turns          |
# | Assistant turns     |
# | Embeddings          |
# +---------------------+

# +---------------------+
# |      Plan           |   (External plan store, default on failure)
# |---------------------|
# | Ordered steps       |
# | Prerequisites       |
# | Resources           |
# +---------------------+

#    \    /
#     \  /
#      \/
# +------------------------------+
# |           Context            |   (Assembled once per request)
# |------------------------------|
# | Persona + mode taxonomy      |
# | Recalled memory (ranked)     |
# | Project identity + plan      |
# | User utterance               |
# +------------------------------+
#         |
#         v
#   [LLM / single tool round]

from .context_manager import ContextManager, NavigatorContext
from .plan_store import InMemoryPlanStore, PlanStore, default_plan, load_plan_or_default

__all__ = [
    "ContextManager",
    "NavigatorContext",
    "InMemoryPlanStore",
    "PlanStore",
    "default_plan",
    "load_plan_or_default",
]
