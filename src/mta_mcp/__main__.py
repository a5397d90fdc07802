from mta_mcp.server import main

main()
