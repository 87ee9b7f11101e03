"""Turn commands into MCP tools: filters, schemas, handlers and execution."""