#!/usr/bin/env python
# -*- coding: utf-8 -*-

from universaldrone import connect, CommandTimeout, PreconditionFailed

# Set up option parsing to get connection string
import argparse

parser = argparse.ArgumentParser(description="Takes off, hops forward one metre and lands.")
parser.add_argument(
    "--connect",
    default="tcp:127.0.0.1:5760",
    help="Vehicle connection target string. If not specified, a local SITL on TCP 5760 is used.",
)
args = parser.parse_args()

connection_string = args.connect

# Connect to the Vehicle
print("Connecting to vehicle on: %s" % connection_string)
drone = connect("mavlink", connection_string=connection_string, takeoff_altitude=2.0)

try:
    drone.take_off()
except PreconditionFailed as exc:
    print("Vehicle refused to take off (%s): %s" % (exc.reason.value, exc))
    drone.close()
    raise SystemExit(1)

print("Altitude: %.2f m" % drone.get_height("m"))
drone.set_speed(0.5, "m/s")

try:
    drone.move_forward(1, "m")
except CommandTimeout:
    print("Hop did not finish in time, vehicle told to hover")

print("Position: %s" % drone.get_current_position("m"))
drone.land()

# Close vehicle object before exiting script
print("Close vehicle object")
drone.close()
