"""Transcript domain -- schemas, pure transforms, gateway and incremental browser.

The pure transforms (speaker grouping, summary projection, merge policy) take
parsed schema objects and never touch the network. FirefliesGateway is the
only module that talks to the Fireflies GraphQL API.
"""
