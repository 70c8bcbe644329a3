TRACE = "trace"
CHUNK = "chunk"
RESULT = "result"
ERROR = "error"
DONE = "done"
