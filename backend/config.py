"""Configuration management for the Training-aware Chat Relay."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS Configuration
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Model Configuration
CHAT_MODEL = os.getenv("CHAT_MODEL", "llama-3.1-8b-instant")
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "500"))
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.7"))

# Training data snapshot
TRAINING_DATA_PATH = os.getenv("TRAINING_DATA_PATH", "./data/training.json")

# Conversation Configuration
MAX_HISTORY_TURNS = 20  # retained per session
CONTEXT_TURNS = 10  # sent with each completion request
MAX_PROMPT_EXAMPLES = 10  # most recent training examples in the system prompt
