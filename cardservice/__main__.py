"""Run the service: python -m cardservice"""

from cardservice.server import main

main()
