from medlearn.core.agents.medical_ai import AIResponseError, MedicalAIAgent, get_ai_agent

__all__ = ["AIResponseError", "MedicalAIAgent", "get_ai_agent"]
