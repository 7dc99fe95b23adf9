"""ticketbridge 진입점"""

from ticketbridge.main import main

main()
