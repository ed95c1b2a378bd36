"""Object keys, content types, object events and raw on-disk storages."""