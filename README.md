# chatbye

This package is the core of a client for a local-network chat. It can do the following:

- find a chat server on the LAN by UDP multicast;
- scan the subnet for open chat ports;
- exchange length-prefixed messages with the server over TCP;
- prepare chat text for display.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `chatbye.network`

- **`AddressEntry(ip, netmask=None, broadcast=None)`** is a frozen dataclass that describes a local address.
  - `prefix_length()` gives the netmask's prefix length, or `-1` when the netmask is missing or invalid.
  - `is_ipv4` tells whether the address is IPv4.
- **`encode_frame(payload)`** puts a 16-bit big-endian length in front of the payload. It raises `ValueError` when the payload is empty or longer than 65535 bytes.
- **`FrameDecoder.feed(data)`** takes received bytes. It returns every frame that is now complete and keeps any partial frame for the next call.
- **`generate_targets(entry, mode)`** lists `(host, port)` pairs for ports 50500–50514.
  - With `ScanMode.SINGLE_IP_ONLY`, only the entry's own address is listed.
  - With `ScanMode.FULL_SCAN`, every host address of the entry's subnet is listed. A network wider than /24, or one with no valid netmask, is narrowed to the address's /24.
  - Non-IPv4 entries give an empty list.
- **`probe_port(host, port, timeout)`** returns whether a TCP connection succeeds within the timeout.
- **`NetworkManager`** is the client connection. It can be used as a context manager, which disconnects on exit.
  - `connect(entry, port)` raises `ConnectionError` on failure. It does nothing if a connection is already open.
  - `send(payload)` returns `False` when there is no connection.
  - `receive()` blocks until at least one whole message has arrived. It raises `ConnectionError` when there is no connection or the server closes it.
  - `disconnect()` closes the connection.
  - `scan(entry, port, mode, max_attempts)` probes the targets in parallel. On success it returns `(entry_with_server_ip, port)`. It returns `None` if every attempt fails, if the scan is stopped, or if a connection is already open.
  - `stop_scan()` stops a scan that is running.
  - Progress is reported through the optional `on_progress(current, total)` callback.
- **`HostBindingMode`** tells a port the user fixed (`FIXED_PORT`) from one that was found by search (`DYNAMIC_PORT`).

### `chatbye.host_info`

This module reads the machine's interfaces through `psutil`. It keeps only interfaces that are up, running and not loopback.

- `network_entries(filter)` returns the IPv4 `AddressEntry` objects.
- `ip_addresses(filter)` returns the IPv4 addresses alone.
- `InterfaceFilter` selects the interfaces: `ALL_INTERFACES`, `ONLY_WIFI` or `ONLY_LAN`.
- `is_wifi_name(name)` guesses from an interface name whether it is wireless.
- `find_interface_for_host(host)` returns the name of the interface that owns an address. It raises `LookupError` when no interface has it.

### `chatbye.discovery`

**`DiscoveryManager.discover(entry, port, mode, timeout=2.0)`** looks for a server.

- With `HostBindingMode.FIXED_PORT`, it returns the given entry and port at once.
- Otherwise it sends `SERVER_DISCOVERY` to 239.255.43.21:50501 every `interval` seconds until a valid reply comes or the timeout passes. On timeout it returns `None`.
- It raises `RuntimeError` if a discovery is already running.

The class also has:

- `send_request()`, which sends one request;
- `stop()`, which ends a discovery and releases the socket.

**`parse_discovery_reply(datagram)`** decodes a server's JSON reply into `(AddressEntry, port)`. It raises `ValueError` for these replies:

- malformed JSON;
- a reply missing `message`, `host_address` or `port`;
- a reply with an invalid port.

### `chatbye.image_settings`

**`ImageSettings(data_dir, colors=None, on_image_updated=None)`** records the background image of each page in `image_settings.json` inside `data_dir`.

- `save_image(source_path, page_name)` copies the file in as `image<page>.<ext>`.
  - It first removes any older copy for that page.
  - It records the new path, calls the listeners and returns the destination.
  - It raises `FileNotFoundError` when the source does not exist.
- `load_image(page_name)` picks the image as follows:
  - a stored image that still exists is returned;
  - with nothing stored, the default is returned;
  - a stored image that has gone missing gives `None`.
- `reset_image(page_name)` forgets the stored image and deletes its copy.
- `default_image_path(page_name)` gives the built-in image for a page.
  - The built-in identifiers are `:/images/portPageImg.png` for `PortPage` and `:/images/namePageImg.png` for `NamePage`.
  - For `ChatPage` it gives the `chat` entry of `colors`.
  - For any other page it gives `None`.
- `is_image_available(page_name)` tells whether a stored image exists.

### `chatbye.chat_text`

- `format_message(message, max_length=50)` wraps text with `<br>`. It breaks at whitespace and cuts words that are longer than a line.
- `split_message(message, max_length=4096)` splits text into parts at sentence ends. Sentences longer than the limit are cut.
- `truncate_message(message)` cuts text to 30 000 characters.
- `format_nick_change(message, client_name, font_family, separator)` renders an `old<separator>new` notice as HTML. There are three forms:
  - someone joined;
  - you renamed yourself;
  - another user renamed themselves.

  A message without the separator is returned unchanged.
- `check_name(name, current_name)` returns a `NameCheck`: `ACCEPTED`, `UNCHANGED`, `TOO_LONG` or `INVALID`. Names longer than 25 characters are not accepted. `NameCheck.message` holds the text to show the user.

## Example

```python
from chatbye.network import AddressEntry, ScanMode, generate_targets, encode_frame, FrameDecoder

entry = AddressEntry("192.168.1.10", "255.255.255.0")
targets = generate_targets(entry, ScanMode.SINGLE_IP_ONLY)
# [("192.168.1.10", 50500), ..., ("192.168.1.10", 50514)]

frame = encode_frame(b'{"type": "message"}')
decoder = FrameDecoder()
messages = decoder.feed(frame)   # [b'{"type": "message"}']
```

## What this package does not do

This is a library only. It does not provide:

- a command-line program;
- a graphical interface;
- a chat server, so nothing here answers discovery requests or accepts clients;
- handling of the chat's JSON message types, such as chat messages, client lists, name changes and server shutdown notices.

It moves raw message bytes, and the caller builds and interprets them.