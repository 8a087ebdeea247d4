from .navigator_agent import NavigatorAgent, parse_tool_arguments

__all__ = ["NavigatorAgent", "parse_tool_arguments"]
