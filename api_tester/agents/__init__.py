"""Agents package"""
from .base_agent import BaseAgent
from .planner_agent import PlannerAgent
from .ranker_agent import RankerAgent
from .executor_agent import ExecutorAgent
from .orchestrator_agent import OrchestratorAgent, default_transport
from .analyzer_agent import AnalyzerAgent

__all__ = [
    "BaseAgent",
    "PlannerAgent",
    "RankerAgent",
    "ExecutorAgent",
    "OrchestratorAgent",
    "AnalyzerAgent",
    "default_transport",
]
