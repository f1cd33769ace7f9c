"""Run the dashboard API from the project root: python start_server.py"""
import os
import sys

backend_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'backend')
os.chdir(backend_dir)
sys.path.insert(0, backend_dir)

import uvicorn

if __name__ == '__main__':
    uvicorn.run(
        'app:app',
        host=os.environ.get('HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', '8000')),
        log_level=os.environ.get('LOG_LEVEL', 'info').lower(),
        reload=False,
    )
