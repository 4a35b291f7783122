#!/usr/bin/env python
# -*- coding: utf-8 -*-

from universaldrone import connect

# Set up option parsing to pick the adapter
import argparse

parser = argparse.ArgumentParser(description="Flies a square and prints where the drone ends up.")
parser.add_argument(
    "--adapter",
    default="sim",
    help="Registered adapter name. If not specified, the simulator is used.",
)
parser.add_argument("--side", type=float, default=50, help="Side length in centimetres.")
args = parser.parse_args()

# Connect to the drone
print("Connecting via adapter: %s" % args.adapter)
drone = connect(args.adapter)


def state_callback(self, attr_name, value):
    print(" Flight state: %s" % value)


drone.add_attribute_listener("flight_state", state_callback)

drone.take_off()
print("Battery: %s%%" % drone.get_battery())

for _ in range(4):
    drone.move_forward(args.side, "cm")
    drone.rotate_right(90)

print("Back at: %s" % drone.get_current_position("cm"))

drone.land()

# Close drone object before exiting script
print("Close drone object")
drone.close()
