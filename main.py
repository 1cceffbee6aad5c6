import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Ensure memograph is in path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from memograph.cli import main

if __name__ == "__main__":
    sys.exit(main())
