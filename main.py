import asyncio
import sys
from typing import Optional

from src.atom_bus import (
    ConfigManager,
    Debounced,
    Event,
    EventBus,
    EventRule,
    Immediate,
    OneOff,
    set_bus,
    setup_logging,
)

# --- Events ---
sign_in_event = Event("SignInEvent", bool)


# --- Subscriber ---
class SignedInStatus:
    def __init__(self):
        self.signed_in = False
        self.rule = EventRule(sign_in_event, targets=[
            Immediate(self.on_sign_in_event),
            OneOff(self.on_first_sign_in_event),
            Debounced(self.on_settled, duration=0.2),
        ])

    def on_sign_in_event(self, value: bool):
        self.signed_in = value
        print(f"[Status] signed in: {value}")

    def on_first_sign_in_event(self, value: bool):
        print(f"[Status] first toggle received: {value}")

    def on_settled(self, value: bool):
        print(f"[Status] settled on: {value}")

    def dispose(self):
        self.rule.cancel()


# --- Emitter ---
def toggle_sign_in_status(bus: EventBus, current: bool):
    bus.emit(sign_in_event.create_payload(not current))


async def async_main(config_path: Optional[str] = None):
    config = ConfigManager(config_path)
    setup_logging(config.data.logging)

    bus = EventBus(config.data.bus)
    set_bus(bus)

    status = SignedInStatus()

    print("--- 1. Rapid toggles ---")
    for _ in range(4):
        toggle_sign_in_status(bus, status.signed_in)
        await asyncio.sleep(0.01)

    await asyncio.sleep(0.3)

    print("--- 2. Slow toggle ---")
    toggle_sign_in_status(bus, status.signed_in)
    await asyncio.sleep(0.3)

    status.dispose()

    print("--- 3. After dispose (nothing printed) ---")
    toggle_sign_in_status(bus, status.signed_in)
    await asyncio.sleep(0.3)


if __name__ == "__main__":
    asyncio.run(async_main(sys.argv[1] if len(sys.argv) > 1 else None))
