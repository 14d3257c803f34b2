"""
Configuration Utilities for the CashCompass Budget Wizard
Loading and saving app settings, default values and the wizard step list.
"""

import json
import os
from typing import Dict, Any, List

CONFIG_FILE = 'cashcompass_config.json'

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    'CASHCOMPASS_API_URL': 'api_url',
    'CASHCOMPASS_API_TOKEN': 'api_token',
    'CASHCOMPASS_USER_ID': 'user_id',
}


def get_default_app_config() -> Dict[str, Any]:
    """Get default app configuration"""
    return {
        # Budget API
        'api_url': 'http://localhost:5000/api/v1',
        'api_token': '',
        'request_timeout': 10,
        'use_remote_recommendations': False,

        # Session
        'user_id': None,
        'progress_dir': '.cashcompass',

        # Budget
        'budget_period': 'monthly',
        'currency': 'KES',
    }


def _mask(secret: str) -> str:
    return f"{secret[:6]}..." if secret else 'EMPTY'


def load_app_config(path: str = CONFIG_FILE) -> Dict[str, Any]:
    """Load settings from the config file over the defaults, then apply env overrides"""
    config = get_default_app_config()
    try:
        if os.path.exists(path):
            with open(path, 'r') as f:
                file_config = json.load(f)
            if isinstance(file_config, dict):
                config.update(file_config)
                print(f"DEBUG [load_app_config]: Loaded {len(file_config)} keys from {path}")
            else:
                print(f"ERROR [load_app_config]: {path} does not hold a JSON object, ignoring it")
        else:
            print(f"DEBUG [load_app_config]: {path} does not exist, using defaults")
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR [load_app_config]: Could not load {path}: {e}")

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    print(f"DEBUG [load_app_config]: api_url = {config['api_url']}, api_token = {_mask(config.get('api_token') or '')}")
    return config


def save_app_config(config: Dict[str, Any], path: str = CONFIG_FILE) -> None:
    """Save app configuration to the config file"""
    try:
        with open(path, 'w') as f:
            json.dump(config, f, indent=2)
        print(f"DEBUG [save_app_config]: Saved {len(config)} keys to {path}")
    except OSError as e:
        print(f"ERROR [save_app_config]: Could not save {path}: {e}")


# Wizard step configuration
WIZARD_STEPS: List[Dict[str, str]] = [
    {"id": "priority", "title": "Priority", "description": "Your financial goal"},
    {"id": "income", "title": "Income", "description": "Income sources"},
    {"id": "profile", "title": "Profile", "description": "Personal details"},
    {"id": "categories", "title": "Categories", "description": "Budget categories"},
    {"id": "recommendations", "title": "Recommendations", "description": "Expert suggestions"},
    {"id": "review", "title": "Review", "description": "Customize budget"},
    {"id": "complete", "title": "Complete", "description": "Finalize & save"},
]
